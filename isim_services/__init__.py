"""
Name-domain services with no HTTP dependencies: Turkish casing and
collation, similarity checks and the Gemini-backed classifier.
"""
