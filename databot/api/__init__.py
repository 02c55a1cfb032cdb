"""HTTP surface for DataBot."""
