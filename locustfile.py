import os
import random
from datetime import date

from locust import HttpUser, task, between

# Accounts must exist beforehand (see create_user.py)
ADMIN_USERNAME = os.getenv("LOAD_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("LOAD_ADMIN_PASSWORD", "admin")


class AdminUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.budget_ids = []
        self.product_ids = []
        r = self.client.post("/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        self.logged_in = r.status_code == 200
        if not self.logged_in:
            return
        for i in range(3):
            r = self.client.post("/products", json={"description": f"item {i}", "price": str(round(random.random() * 100 + 1, 2))})
            if r.status_code == 201:
                self.product_ids.append(r.json()["id"])

    @task(2)
    def create_budget(self):
        if not self.logged_in:
            return
        r = self.client.post("/budgets", json={"recipient_name": f"client_{random.randint(1, 1_000_000)}", "creation_date": date.today().isoformat()})
        if r.status_code == 201:
            self.budget_ids.append(r.json()["id"])

    @task(3)
    def add_line(self):
        if not self.budget_ids or not self.product_ids:
            return
        budget_id = random.choice(self.budget_ids)
        self.client.post(
            f"/budgets/{budget_id}/lines",
            json={"product_id": random.choice(self.product_ids), "quantity": random.randint(1, 5)},
            name="/budgets/[id]/lines",
        )

    @task(3)
    def budget_detail(self):
        if not self.budget_ids:
            return
        self.client.get(f"/budgets/{random.choice(self.budget_ids)}", name="/budgets/[id]")

    @task(1)
    def list_budgets(self):
        self.client.get("/budgets")
