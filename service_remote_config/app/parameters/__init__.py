"""
Parameters package.

Holds the parameter model and the resolver that turns evaluated condition
results into typed values.
"""
