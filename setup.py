from setuptools import setup, find_packages

# Get the long description from the README file
def readme():
    with open('README.md', encoding='utf-8') as f:
        return f.read()

setup(
    name='vacomplex',
    version='0.1.0',
    description='Vector animation complexes: animated faces, cycles and '
                'their triangulation',
    long_description=readme(),
    long_description_content_type='text/markdown',
    author='vacomplex developers',
    license='MIT',
    packages=find_packages(exclude=['tests', '*.tests', '*.tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.16.0',
    ],
    extras_require={
        'dev': [
            'pytest>=6.0',
            'pytest-cov>=2.10',
            'matplotlib>=3.0',
        ],
        'plotting': [
            'matplotlib>=3.0',
        ],
    },
    keywords=['vector-graphics', 'animation', 'cell-complex',
              'triangulation', 'computational-geometry'],
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Intended Audience :: Developers',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Scientific/Engineering :: Mathematics',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    zip_safe=False,
)
