"""Application layer: ports, DTOs and orchestration services."""
