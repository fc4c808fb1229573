"""
unidirectory: university profile directory (programs, scholarships, fees).
"""
