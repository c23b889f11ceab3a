"""
Remote Organizations/Account access and error classification.
"""
