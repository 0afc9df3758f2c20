"""Example: Pair with a hub and store the token."""
from dirigera import HubConfig, pair, save_config


def main():
    """Press the action button on the hub when asked."""
    ip_address = "192.168.1.10"
    print("Press the action button on the bottom of your Dirigera hub")
    token = pair(ip_address, client_name="example", max_attempts=30)
    save_config(HubConfig(ip_address=ip_address, token=token))


if __name__ == "__main__":
    main()
