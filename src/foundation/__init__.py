"""Foundation utilities for shared infrastructure components.

This package provides shared utilities including:
- HTTP sessions with connection-level retries
- Structured JSON logging
- Bounded-TTL in-memory caching
- Rate-limit classification and waiting
- The single rate-limit retry
"""
