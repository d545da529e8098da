"""PARP chat gateway.

Authenticated streaming chat over a local Ollama backend and a hosted
OpenAI backend, re-published as a single Server-Sent-Events stream.
"""

__version__ = "1.0.0"
