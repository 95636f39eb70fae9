"""Protobuf and gRPC modules for the server API.

grpcio-tools compiles ``grpc_app/protos/*.proto`` when this package is
imported, yielding the usual ``*_pb2`` message module and ``*_pb2_grpc``
stub/servicer module. The ``.proto`` files are the only schema source.
"""
import grpc

PROTO_DIR = "nakama_client/grpc_app/protos"

api_pb2 = grpc.protos(f"{PROTO_DIR}/api.proto")
apigrpc_pb2, apigrpc_pb2_grpc = grpc.protos_and_services(f"{PROTO_DIR}/apigrpc.proto")

__all__ = ["api_pb2", "apigrpc_pb2", "apigrpc_pb2_grpc"]
