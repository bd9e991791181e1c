"""Core types, constants, exceptions and configuration."""
