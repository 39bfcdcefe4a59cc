"""The order service: domain, in-memory storage, application handlers and gRPC endpoint."""