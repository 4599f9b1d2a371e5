"""
xpp-runner - Unattended X++ compiler and test runner automation.

Runs the X++ compiler and the SysTestConsole test runner once per target,
gets past the debug-attach "press any key" prompt without a human,
parses the XML results and reports an aggregate pass/fail.

Main entry points:
    - xpp_runner.main: CLI entrypoint
    - xpp_runner.core.runner: run_compile() and run_tests()
    - xpp_runner.models.config: Config and load_env()
"""
