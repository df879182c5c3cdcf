"""Command-line entry point tests."""
import pytest

from renderer import cli


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = cli.parse_args(["https://a.example"])
        assert args.urls == ["https://a.example"]
        assert args.output
        assert args.poll_interval > 0

    def test_options(self):
        args = cli.parse_args(["https://a.example", "https://b.example", "-o", "/tmp/out", "--poll-interval", "0.5"])
        assert args.urls == ["https://a.example", "https://b.example"]
        assert args.output == "/tmp/out"
        assert args.poll_interval == 0.5


class TestRun:
    """Tests for running a job from the command line."""

    def test_invalid_url_exit_code(self):
        assert cli.main(["not-a-url"]) == 2

    @pytest.mark.asyncio
    async def test_successful_run(self, make_controller, fake_session, sample_urls, output_dir):
        controller = make_controller(fake_session)
        code = await cli.run(sample_urls, output_dir, 0.01, controller=controller)
        assert code == 0
        assert len(fake_session.captured) == 2

    @pytest.mark.asyncio
    async def test_failed_url_exit_code(self, make_controller, make_session, output_dir):
        session = make_session(fail_urls=["https://unreachable.invalid"])
        controller = make_controller(session)
        code = await cli.run(["https://unreachable.invalid"], output_dir, 0.01, controller=controller)
        assert code == 1
