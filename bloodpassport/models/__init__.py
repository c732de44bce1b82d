"""Blood passport scoring service package."""
