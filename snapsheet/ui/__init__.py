"""Streamlit surfaces."""
