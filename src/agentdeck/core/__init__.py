"""Core utilities shared by every agentdeck subsystem.

    - result: Result type and error hierarchy
    - config: Settings loading
    - console: Rich console and logging
    - state: Process-wide application state
"""
