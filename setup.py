from setuptools import setup

setup(
    name='dpmm',
    version='0.1.0',
    description='Dirichlet Process Mixture Model fit by collapsed Gibbs sampling with conjugate priors',
    python_requires='>=3.8',
    packages=['dpmm'],

    install_requires=[
        'scipy>=1.6.0',
        'numpy>=1.17',
        'scikit-learn>=0.24',
        'matplotlib>=3.5'],
    extras_require={
        'test': ['pytest']},

    license='MIT'
)
