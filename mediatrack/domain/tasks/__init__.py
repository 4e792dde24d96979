"""Task scheduling endpoints used by the conflict engine"""
