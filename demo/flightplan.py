"""
Example flightplan

Builds a release locally, ships it to every web host with rsync and switches
the `current` symlink. Run with:

    fly -f demo/flightplan.py deploy:staging --branch=main
"""

import time

SRC = "/srv/app"


def configure(plan):
    plan.target("staging", [
        {"host": "staging1.example.com", "username": "deploy"},
        {"host": "staging2.example.com", "username": "deploy", "failsafe": True},
    ], {"branch": "develop"})

    plan.target("production", [
        {
            "host": f"web{i}.example.com",
            "username": "deploy",
            "tunnel": {"host": "bastion.example.com", "username": "jump"},
        }
        for i in range(1, 4)
    ], {"branch": "main"})

    release = time.strftime("%Y%m%d%H%M%S")

    @plan.local(["deploy", "build"])
    async def build(local):
        branch = plan.runtime.options["branch"]
        local.log(f"Building {branch} as release {release}")
        await local.git(f"checkout {branch}")
        await local.npm("ci", silent=True)
        await local.npm("run build")

    @plan.local("deploy")
    async def ship(local):
        files = await local.git("ls-files", silent=True)
        await local.transfer(files, f"{SRC}/releases/{release}")

    @plan.remote("deploy")
    async def activate(remote):
        with remote.scoped(f"cd {SRC}"):
            await remote.ln(f"-sfn releases/{release} current")
        await remote.sudo("systemctl restart app", failsafe=True)

    @plan.remote("status")
    async def status(remote):
        await remote.exec("readlink /srv/app/current")

    @plan.debriefing
    def done():
        print(f"Release {release} finished")
