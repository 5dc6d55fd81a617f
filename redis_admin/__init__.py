"""Redis Admin - REST gateway and browser UI over a Redis keyspace"""
