"""sportstat: rating systems and statistical models for sports analytics"""
__version__ = '0.1.0'
