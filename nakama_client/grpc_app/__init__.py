"""gRPC transport for the client.

This package hosts:
- The subset ``.proto`` files (`protos/`) and the modules compiled from them (`generated`).
- A client-side logging interceptor.
- Mappers between protobuf messages and the domain models.
"""
