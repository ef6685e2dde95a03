"""Process-wide registry of executables built by cargo.

The registry is built once, on first access, and never changes:
- runs 'cargo build --message-format json' with the requested options
- collects every executable artifact reported by cargo
- rejects later callers that ask for a different configuration
"""

from bintest.registry.cell import OnceCell
from bintest.registry.executables import BinTest, acquire

__all__ = [
    "BinTest",
    "OnceCell",
    "acquire",
]
