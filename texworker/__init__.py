"""
texworker - single-shot LaTeX compile worker

Reads one compile request (JSON) from stdin, runs the document build tool
against the project under a hard deadline, and writes exactly one JSON
response line to stdout.

Architecture:
- Decoder: stdin text -> CompileRequest (or an early failure response)
- Compiler: bounded build tool subprocess + artifact-based classification
- Encoder: CompileResponse -> one JSON line on stdout
"""

__version__ = "0.1.0"
