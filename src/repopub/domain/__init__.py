"""Domain layer — pure value objects and layout rules.

The domain layer has no I/O beyond reading the descriptor it is handed
and never imports from services, commands, or output.
"""
