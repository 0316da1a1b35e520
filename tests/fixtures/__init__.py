"""
Pytest fixtures for the ResilientHTTP test suite.

- http_mocking: scripted transports, MockTransport clients, sleep and hook doubles
"""
