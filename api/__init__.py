"""
Peptide Protocol Engine - HTTP boundary
"""
