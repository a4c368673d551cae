"""GlowCart skincare storefront."""
