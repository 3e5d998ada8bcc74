from setuptools import setup

setup(
    name='evict',
    version='0.1.0',
    python_requires='>=3.8',
    install_requires=['click>=8.0'],
    extras_require={'test': ['pytest']},
    package_dir={'': 'src'},
    packages=['evict'],
    py_modules=['app'],
    entry_points={'console_scripts': ['evict=app:main']},
)
