"""
In-memory indexing for a fake CPAN build.

This package is responsible for:
* Deciding which distribution owns each package name (02packages).
* Learning author display names (01mailrc).
* Walking the source tree and driving a full build run.
"""
