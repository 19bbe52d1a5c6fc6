"""chromium-fetcher: find and download historical Chromium snapshot builds."""
