from __future__ import annotations

from config.gmail_config import ClientConfig, GmailConfig
from tools.errors import MailDispatchError
from tools.mail_dispatcher import MailDispatcher
from utils.logger import Logger, log_event


def _print_help() -> None:
    print(
        "\nCommands:\n"
        "- 'authorize'      show the Google consent URL\n"
        "- 'code <code>'    paste the authorization code back and store the token\n"
        "- 'status'         show credential state\n"
        "- 'send'           send a test email\n"
        "- 'revoke'         delete the stored token\n"
        "- 'help'\n"
        "- 'quit'\n"
    )


def _print_status(dispatcher: MailDispatcher) -> None:
    print(f"Stored credential: {'yes' if dispatcher.has_stored_credential() else 'no'}")
    print(f"Operational: {'yes' if dispatcher.is_operational() else 'no'}")
    print(f"Authorization code pending: {'yes' if dispatcher.is_authorization_code_set() else 'no'}")


def _send_test_mail(dispatcher: MailDispatcher) -> None:
    from_name = input("From name> ").strip()
    from_address = input("From address> ").strip()
    to_address = input("To address> ").strip()
    subject = input("Subject> ").strip()
    body = input("HTML body> ").strip()
    raw_paths = input("Attachment paths (comma separated, optional)> ").strip()
    attachments = [p.strip() for p in raw_paths.split(",") if p.strip()]

    res = dispatcher.send(from_name, from_address, to_address, subject, body, attachments)
    print(f"Sent. Gmail message id: {res.id}")


def main() -> None:
    logger = Logger().build()
    gmail_cfg = GmailConfig.from_env()
    client_cfg = ClientConfig.from_env()

    try:
        dispatcher = MailDispatcher(
            client_cfg.client_id,
            client_cfg.client_secret,
            client_cfg.redirect_uri,
            config=gmail_cfg,
            # whoever runs the console is the operator
            session_check=lambda: True,
            logger=logger,
        )
        log_event(logger, "dispatcher_ready", scopes=list(gmail_cfg.scopes), operational=dispatcher.is_operational())
    except Exception as e:
        print(f"Failed to initialize Gmail auth: {e}")
        print(
            f"Fix: put your OAuth client JSON at '{gmail_cfg.client_secret_path}' "
            "or set GMAIL_CLIENT_ID / GMAIL_CLIENT_SECRET."
        )
        return

    print("Gmail mail dispatch console")
    _print_help()
    _print_status(dispatcher)

    while True:
        command = input("\n> ").strip()
        if not command:
            continue
        name, _, arg = command.partition(" ")
        name = name.lower()

        if name in {"q", "quit", "exit"}:
            break

        if name == "help":
            _print_help()
            continue

        if name == "status":
            _print_status(dispatcher)
            continue

        if name == "authorize":
            if dispatcher.has_stored_credential():
                print("Already authorized. Use 'revoke' first to authorize another account.")
                continue
            url = dispatcher.get_authorization_url()
            if not url:
                print("An authorization code is already pending. Use 'code <code>' or restart.")
                continue
            print("Open this URL, grant access, then paste the code with 'code <code>':")
            print(url)
            continue

        if name == "code":
            if not arg.strip():
                print("Usage: code <authorization code>")
                continue
            dispatcher.set_authorization_code(arg)
            try:
                dispatcher.exchange_authorization_code()
            except Exception as e:
                print(f"Error exchanging code: {e}")
                continue
            print("Authorized." if dispatcher.is_operational() else "Code stored but credential is not usable.")
            continue

        if name == "revoke":
            dispatcher.revoke_credential()
            print("Stored token deleted.")
            continue

        if name == "send":
            try:
                _send_test_mail(dispatcher)
            except MailDispatchError as e:
                print(f"{e} Run 'authorize' first.")
            except Exception as e:
                print(f"Error sending: {e}")
            continue

        print("Sorry, I didn't understand. Say 'help' for the command list.")


if __name__ == "__main__":
    main()
