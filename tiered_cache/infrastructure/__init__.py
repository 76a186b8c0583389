"""
Infrastructure Layer

Storage adapters (process-local cache, Redis) and the tiered façade.
"""
