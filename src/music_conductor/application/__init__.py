"""
Application Layer

Contains application services and the ports they depend on.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- services/: Credential store, token lifecycle and playback orchestration
- interfaces/: Port interfaces for infrastructure adapters
- tools.py: String-returning facade handed to the chat layer
"""
