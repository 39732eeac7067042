"""agenticad: multimodal product-design analysis core."""
