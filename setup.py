from setuptools import setup

setup(
    name='weathergen',
    version='0.1.0',
    packages=['weathergen'],
    license='MIT',
    description='package for stochastic daily weather generation with adjustable dry and wet spells',
    python_requires='>=3.9',
    install_requires=["pandas", "numpy", "scipy", "pdrle", "toml"],
    extras_require={"test": ["pytest"]}
)
