"""Command line interface for group_allocator."""
