import setuptools


setuptools.setup(
    name='hotstats',
    version='1.0.0',
    description='StatsD client with UDP and TCP transports, tags, and sampling',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=[
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    author='Kevin Lin',
    author_email='developer@kevinlin.info',
    entry_points={
        'console_scripts': [
            'hotstats = hotstats.cmd.main:main',
        ],
    },
)
