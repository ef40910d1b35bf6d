from setuptools import setup, find_packages

setup(
    name='companion-chat',
    version='1.0.0',
    packages=find_packages(include=['companion', 'companion.*']),
    include_package_data=True,
    python_requires='>=3.11',
    install_requires=[
        'colored>=2.2.3',
        'halo>=0.0.31',
        'numpy>=1.26.2',
        'python-dotenv>=1.0.0',
        'requests>=2.31.0',
        'fastapi>=0.110.0',
        'pydantic>=2.5.0',
        'uvicorn>=0.27.0',
        'openai>=1.12.0',
        'reportlab>=4.0.0',
        'limits>=3.6.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
            'httpx>=0.25.0',
        ],
    },
    entry_points='''
        [console_scripts]
        companion=companion.__main__:main
    ''',
    license='MIT',
    keywords='mental health companion chat sentiment crisis detection',
    description='A crisis-aware companion chat with lexicon sentiment scoring',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
