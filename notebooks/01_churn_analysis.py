# %% [markdown]
# # Telco Customer Churn Analysis
# **Goal**: Load the Telco churn dataset, check and clean it, and answer the fixed business questions
# behind the `vw_churn_data` dashboard view.
#
# **Key Questions**:
# 1. Is Fiber optic less reliable than DSL (churn rate by internet service)?
# 2. Are churners leaving because of price?
# 3. Does tech support reduce churn for Fiber optic customers?
# 4. Which payment methods lose the most revenue from high-value customers (> $70/mo)?
# 5. How do contract type and tenure affect churn?

# %%
import seaborn as sns
import matplotlib.pyplot as plt

from telco_churn.pipeline import run_pipeline

# Set visualization style
sns.set_theme(style="whitegrid")
plt.rcParams["figure.figsize"] = (10, 6)

# %% [markdown]
# ## 1. Load, Check, Clean
# Runs the full pipeline against the configured database (see `.env` / `RAW_DATA_PATH`).

# %%
result = run_pipeline()
print(f"Rows loaded: {result.rows_loaded}")
print(result.quality.missing)
print(f"Duplicates: {len(result.quality.duplicates)}, clean: {result.quality.is_clean}")
analyses = result.analyses

# %% [markdown]
# ## 2. Overall Churn Rate

# %%
display(analyses["overall_churn_rate"])

# %% [markdown]
# ## 3. Product Reliability

# %%
by_service = analyses["churn_rate_by_internet_service"]
display(by_service)
sns.barplot(data=by_service, x="InternetService", y="churn_rate_percent", palette="viridis")
plt.title("Churn Rate % by Internet Service")
plt.show()

# %% [markdown]
# ### Business Insight:
# - Fiber optic churn (~42%) is roughly double DSL (~19%).

# %% [markdown]
# ## 4. Price Sensitivity

# %%
display(analyses["price_sensitivity_by_internet_service"])

# %% [markdown]
# ### Business Insight:
# - Retained customers pay slightly **more** than churners, so price is likely not the primary driver.

# %% [markdown]
# ## 5. Tech Support Impact (Fiber optic)

# %%
support = analyses["tech_support_impact"]
display(support)
sns.barplot(data=support, x="TechSupport", y="churn_rate_percent", palette="pastel")
plt.title("Fiber optic Churn Rate % by Tech Support")
plt.show()

# %% [markdown]
# ### Business Insight:
# - Tech support cuts Fiber churn from ~49% to ~23%.

# %% [markdown]
# ## 6. Revenue Lost from High-Value Customers

# %%
revenue = analyses["revenue_lost_by_payment_method"]
display(revenue)
sns.barplot(data=revenue, x="total_revenue_lost", y="PaymentMethod", palette="magma")
plt.title("Revenue Lost by Payment Method (MonthlyCharges > 70, churned)")
plt.show()

# %% [markdown]
# ### Business Insight:
# - Electronic check is the highest-loss segment.

# %% [markdown]
# ## 7. Contract and Tenure

# %%
display(analyses["churn_rate_by_contract"])

tenure = analyses["churn_rate_by_tenure_group"]
sns.barplot(data=tenure, x="Tenure_Group", y="churn_rate_percent", palette="crest")
plt.title("Churn Rate % by Tenure Group")
plt.show()

# %% [markdown]
# ### Business Insight:
# - Month-to-month customers and customers in their first year churn the most.
