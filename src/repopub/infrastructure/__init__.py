"""Infrastructure layer — filesystem placement, temp dirs, log capture.

Infrastructure may import from domain but never from services or commands.
"""
