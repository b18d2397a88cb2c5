import subprocess

import structlog

log = structlog.get_logger()


class NsupdateClient:
    def __init__(self, command="nsupdate", key_file=None, timeout=60):
        self.command = command
        self.key_file = key_file
        self.timeout = timeout

    def build_command(self):
        cmd = [self.command]
        if self.key_file:
            cmd.extend(["-k", self.key_file])
        return cmd

    def send(self, script):
        """
        Feeds a directive script to nsupdate on stdin.

        Returns True when nsupdate exited cleanly. Directives already accepted
        by the server are not rolled back when a later transaction fails.
        """
        cmd = self.build_command()
        log.debug("Running nsupdate", command=cmd, directives=script.count("\n"))
        try:
            result = subprocess.run(
                cmd,
                input=script,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            log.error("nsupdate executable not found", command=self.command, error=e)
            return False
        except subprocess.TimeoutExpired:
            log.error("nsupdate timed out", command=cmd, timeout=self.timeout)
            return False

        if result.stdout:
            log.debug("nsupdate stdout", output=result.stdout)
        if result.returncode != 0:
            log.error(
                "nsupdate failed",
                returncode=result.returncode,
                stderr=result.stderr[:200] if result.stderr else "No error output",
            )
            return False

        log.info("nsupdate applied directives successfully")
        return True
