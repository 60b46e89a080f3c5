"""
Storage Module
==============

Named local storage disks for persisting rendered artifacts.
"""
