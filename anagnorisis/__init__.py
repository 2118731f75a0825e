"""
Anagnorisis - Declarative change recognition for live document trees.

Test drivers describe the single change they are waiting for (an element
added or removed below an anchor, an attribute changed on it, a text node
reaching a value) and receive the matching node once, synchronously or after
a short delay:
- Pattern matching over batches of tree change records
- Minimal subscription configuration derived from the pattern
- One-shot recognizer sessions with cancellation

The name "Anagnorisis" (Greek: ἀναγνώρισις) is Aristotle's term for the
moment of recognition in a drama - the instant the thing waited for is
finally seen for what it is.
"""

__version__ = "0.1.0"
