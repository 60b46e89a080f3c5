"""
Core Business Logic
==================

Core modules for document normalization, rendering and storage.

Modules:
- rendering: content resolution, HTML normalization, render builder and browser renderer
- storage: named storage disks and file persistence
"""
