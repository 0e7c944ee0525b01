"""
Car builds: covers, gallery images and modification lists.
"""
