"""FastAPI transport for the Image Optimizer Service."""
