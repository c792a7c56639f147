from setuptools import find_packages, setup

package_name = 'fabrik_chain'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    install_requires=['setuptools', 'numpy', 'scipy', 'matplotlib', 'PyYAML'],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.8',
    zip_safe=True,
    maintainer='you',
    maintainer_email='you@example.com',
    description='FABRIK inverse kinematics for unconstrained 3D joint chains',
    license='Apache-2.0',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'fabrik-diagnose = fabrik_chain.diagnose:main',
        ],
    },
)
