"""
repositories/ - Data Access Layer
==================================
Each repository owns the SQL for one group of tables and returns
domain model objects from models/.
"""
