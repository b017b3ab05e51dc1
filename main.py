"""phone-mqtt entrypoint: MQTT remote control for a simulated softphone."""

import asyncio
import logging
import signal

from dotenv import load_dotenv

from phone_mqtt.config import Settings
from phone_mqtt.module import PhoneControl
from phone_mqtt.phone.simulated import LoggingPlayer, SimulatedPhone

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT = "sip:baresip@localhost"


async def main() -> None:
    load_dotenv()
    settings = Settings.from_env()

    loop = asyncio.get_running_loop()

    phone = SimulatedPhone()
    for aor in settings.accounts or (DEFAULT_ACCOUNT,):
        phone.add_agent(aor)

    control = PhoneControl(phone, LoggingPlayer(), settings)
    await control.start()
    phone.register_all()

    shutdown = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)
    try:
        await shutdown.wait()
        logger.info("Shutting down...")
    finally:
        phone.unregister_all()
        await control.close()


if __name__ == "__main__":
    asyncio.run(main())
