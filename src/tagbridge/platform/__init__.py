"""
Summary: Platform services shared by feature packages.
Why: Keep logging setup out of the domain and adapter layers.
"""
