"""cfactory - a small build tool for C projects described by factory.json files.

A project names its sources, include directories, standard libraries and
dependencies in a JSON descriptor. cfactory resolves the dependency graph
(fetching remote dependencies with git or as archives), then compiles and
links every project with gcc, in dependency order, for a debug and a
release target.
"""

__version__ = "0.1.0"
