"""
Declaration generators by target language
"""
