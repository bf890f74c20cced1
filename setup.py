from setuptools import setup, find_packages

with open('requirements.txt') as fr:
    requirements = [line.strip() for line in fr if line.strip() and not line.startswith('#')]

setup(
    name='w3wallet',
    version='0.1.0',
    description='Wallet connection orchestration for web3 dapps',
    packages=find_packages('src'),
    package_dir={'': 'src'},
    python_requires='>=3.9',
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0', 'pytest-asyncio>=0.23'],
    },
)
