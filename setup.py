from setuptools import setup

setup(
    name='dtx-instruments-client',
    version='0.3.0',
    description='Control-plane RPC client for the DTX instruments services (process control, device info, sysmontap)',
    author='isantolin',
    author_email='',
    packages=[
        'dtxclient',
        'dtxclient.config',
        'dtxclient.protocol',
        'dtxclient.rpc',
        'dtxclient.services',
        'dtxclient.transport',
    ],
    python_requires='>=3.11',
    install_requires=[
        'msgspec',
        'transitions',
        'prometheus-client',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
    ],
)
