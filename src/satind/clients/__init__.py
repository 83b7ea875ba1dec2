from satind.clients.rpc import StarknetRPC

__all__ = ["StarknetRPC"]
