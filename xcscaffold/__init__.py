"""xcscaffold -- generate iOS app projects from a placeholder template.

Copies a static Xcode workspace / Swift Package template tree and replaces the
``MyProject``, ``com.example.MyProject`` and ``MyProjectFeature`` tokens in
file names and text contents with user-supplied values.
"""

__version__ = "0.1.0"
