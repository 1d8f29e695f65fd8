"""
Provides project-level commands. Commands are run via `python setup.py <command> [args]`

Commands available:

- apidoc: regenerate reST docs for inline pydoc comments
- autobuild: watch for changes to the reST files and rebuild the documentation, refreshing
   the browser.
"""

from setuptools import setup, Command

import os


class RunInRootCommand(Command):
    user_options = []

    def initialize_options(self):
        self.cwd = None

    def finalize_options(self):
        self.cwd = os.getcwd()

    def run(self):
        assert os.getcwd() == self.cwd, 'Must be in package root: %s' % self.cwd
        self.runcmd()

    def runcmd(self):
        pass


class ApiDocCommand(RunInRootCommand):
    description = "regenerates the API docs"

    def runcmd(self):
        os.system('"sphinx-apidoc" -f -e -o docs/apidoc src/tcpclient')


class AutoBuildCommand(RunInRootCommand):
    description = "watches the docs for changes and rebuilds them, automatically refreshing the browser page"

    def runcmd(self):
        os.system("sphinx-autobuild docs docs/_build/html -B")


setup(
    name='tcpclient-py',
    version='0.1.0',
    description='TCP client connections with endpoint reuse and short-read response framing.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['tcpclient', 'tcpclient.conduit', 'tcpclient.config', 'tcpclient.connector',
              'tcpclient.support'],
    python_requires='>=3.8',
    install_requires=[
        'configobj>=5.0.6',
    ],
    extras_require={
        'test': [
            'PyHamcrest',
            'timeout-decorator',
            'pytest',
        ],
    },
    zip_safe=False,
    cmdclass={
        'apidoc': ApiDocCommand,
        'autobuild': AutoBuildCommand
    }
)
