from setuptools import setup, find_packages

setup(
    name='chromium-fetcher',
    version='0.1.0',
    description='Find and download historical Chromium snapshot builds',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.10',
    install_requires=[
        'requests',
        'pick',
        'PyYAML',
        'urllib3',
        'platformdirs',
        'rich',
        'aiohttp',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'chromium-fetcher=chromium_fetcher.cli:main',
        ],
    },
)
