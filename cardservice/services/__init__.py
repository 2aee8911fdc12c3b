# Services package init
"""
Card Service — Services Layer
===============================

Service Inventory:
    - CardService: list / get / create / update / delete over a CardStore

Services know nothing about HTTP. They raise CardServiceError subclasses
and return Cards or store acknowledgments.
"""
