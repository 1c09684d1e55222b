"""Districts and parks: the catalog visitors book against"""
