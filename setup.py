from setuptools import setup

with open('README.rst','rb') as f:
    long_description = f.read().decode('utf-8')

setup(
    name='linecalc',
    version='1.0',
    description='Line-oriented accumulator calculator',
    long_description=long_description,
    license='MIT',
    package_dir={'': 'src'},
    py_modules=['linecalc'],
    python_requires='>=3.6',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        ],
    keywords='calculator accumulator parser',
)
