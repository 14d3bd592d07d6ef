"""
DCM Surgical Decision Support

Deterministic rule engine for degenerative cervical myelopathy: whether to
operate, and which approach is likeliest to reach the mJOA MCID.
"""
__version__ = "0.1.0"
