"""The stock service: item catalogue, queries, gRPC endpoint and entry point."""