"""
Command line interface for EKS stack utilities.
"""
