"""Studio photo service: pending media handling and product image generation."""
