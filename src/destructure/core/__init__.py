"""
Core Package.

Contains the generation pipeline:
- Field Model Extraction
- Companion, Conversion, Mutation and Reference Synthesizers
- Artifact Generator
- Module Expansion Engine and Import Injection
"""
